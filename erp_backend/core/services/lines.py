# core/services/lines.py

"""
Line payloads reach the services either as plain dicts (admin, commands,
tests) or as objects with attributes (validated serializer data, model rows).
"""


def line_value(line, key: str):
    if isinstance(line, dict):
        return line.get(key)
    return getattr(line, key, None)
