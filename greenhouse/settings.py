import json
import os


def load_settings(filePath='settings.json'):
    if not os.path.isabs(filePath) and not os.path.exists(filePath):
        base_dir = os.path.dirname(os.path.abspath(__file__))
        filePath = os.path.join(base_dir, filePath)
    with open(filePath, 'r', encoding='utf-8') as f:
        settings = json.load(f)
    return settings
