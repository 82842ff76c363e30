import os
from dotenv import load_dotenv

load_dotenv()

# default component ordering for SM2 ciphertext when a call passes mode=None
SM2_MODE = os.getenv("GUOMI_SM2_MODE", "C1C3C2")

# casing of hex output when a call passes upper=None
HEX_UPPER = os.getenv("GUOMI_HEX_UPPER", "false").lower() in ("1", "true", "yes")

JSON_ENSURE_ASCII = os.getenv("GUOMI_JSON_ENSURE_ASCII", "false").lower() in ("1", "true", "yes")
