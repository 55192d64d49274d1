"""
Shared configuration and helpers
"""

import os
import hashlib
import secrets
import uuid
from datetime import datetime, timezone
from motor.motor_asyncio import AsyncIOMotorClient
from dotenv import load_dotenv
from pathlib import Path

# Load .env
ROOT_DIR = Path(__file__).parent
load_dotenv(ROOT_DIR / '.env')

# MongoDB (record store)
MONGO_URL = os.environ.get('MONGO_URL', 'mongodb://localhost:27017')
DB_NAME = os.environ.get('DB_NAME', 'owldoor_crm')

client = AsyncIOMotorClient(MONGO_URL)
db = client[DB_NAME]

# Remote procedures (serverless functions)
FUNCTIONS_URL = os.environ.get('FUNCTIONS_URL', 'http://localhost:54321/functions/v1')
FUNCTIONS_API_KEY = os.environ.get('FUNCTIONS_API_KEY', '')
FUNCTIONS_TIMEOUT = float(os.environ.get('FUNCTIONS_TIMEOUT', '30'))

# Public app URL (package links, magic links)
PUBLIC_APP_URL = os.environ.get('PUBLIC_APP_URL', 'http://localhost:3000').rstrip('/')

CORS_ORIGINS = os.environ.get('CORS_ORIGINS', '*').split(',')


# ==================== HELPERS ====================

def new_id() -> str:
    """Opaque primary key for every record"""
    return str(uuid.uuid4())

def generate_api_key() -> str:
    """Zapier API key: owl_ + 64 hex chars"""
    return f"owl_{secrets.token_hex(32)}"

def hash_api_key(api_key: str) -> str:
    """SHA-256 hex digest; only the hash is ever stored"""
    return hashlib.sha256(api_key.encode()).hexdigest()

def now_iso() -> str:
    """Current UTC time as ISO string"""
    return datetime.now(timezone.utc).isoformat()
