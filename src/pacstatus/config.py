import os
import dotenv
import logging

dotenv.load_dotenv()

GITHUB_PRIVATE_KEY = os.environ.get("GITHUB_PRIVATE_KEY")
GITHUB_APP_ID = int(os.environ.get("GITHUB_APP_ID", 0))
GITHUB_TOKEN = os.environ.get("GITHUB_TOKEN")
GITHUB_API_URL = os.environ.get("GITHUB_API_URL", "https://api.github.com")

OVERRIDE_LOGGING = logging.getLevelName(os.environ.get("OVERRIDE_LOGGING", "WARNING"))

PAC_SETTINGS_FILE = os.environ.get("PAC_SETTINGS_FILE")

TELEGRAM_TOKEN = os.environ.get("TELEGRAM_TOKEN")
TELEGRAM_CHAT_ID = os.environ.get("TELEGRAM_CHAT_ID")
TELEGRAM_LEVEL = logging.getLevelName(os.environ.get("TELEGRAM_LEVEL", "WARNING"))

ACCESS_TOKEN_TTL = float(os.environ.get("ACCESS_TOKEN_TTL", 300))

PUSH_GATEWAY = os.environ.get("PUSH_GATEWAY")
