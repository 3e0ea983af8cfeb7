import json

REQUIRED_KEYS = ("problem", "resolution")


def test(payload):
    try:
        data = json.loads(payload)
    except ValueError:
        return False
    if not isinstance(data, dict):
        return False
    return all(isinstance(data.get(key), str) and data.get(key) for key in REQUIRED_KEYS)
