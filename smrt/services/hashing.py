import asyncio
import hashlib
import hmac
import secrets
from concurrent.futures import ThreadPoolExecutor

# scrypt cost parameters; changing them invalidates every stored password hash
SCRYPT_N = 16384
SCRYPT_R = 8
SCRYPT_P = 1
SCRYPT_DKLEN = 64
SCRYPT_MAXMEM = 64 * 1024 * 1024
SALT_BYTES = 16

API_SECRET_PREFIX = "sk_"
API_SECRET_BYTES = 24

# scrypt blocks for tens of milliseconds, keep it off the event loop
executor = ThreadPoolExecutor()


# ---------------- PASSWORD HASHING ----------------

def hash_password(password: str, salt: str) -> str:
    """Derive the hex scrypt key for a password and a hex salt string."""
    derived_key = hashlib.scrypt(
        password.encode("utf-8"),
        salt=salt.encode("utf-8"),
        n=SCRYPT_N,
        r=SCRYPT_R,
        p=SCRYPT_P,
        dklen=SCRYPT_DKLEN,
        maxmem=SCRYPT_MAXMEM,
    )
    return derived_key.hex()


def make_password_hash(password: str) -> str:
    """Hash a password with a fresh salt. Returns the stored form "<salt>:<key>"."""
    salt = secrets.token_hex(SALT_BYTES)
    return f"{salt}:{hash_password(password, salt)}"


def verify_password(password: str, stored_hash: str) -> bool:
    """Verify a password against a stored "<salt>:<key>" value."""
    salt, sep, key = (stored_hash or "").partition(":")
    if not sep or not salt or not key:
        return False
    return hmac.compare_digest(hash_password(password, salt).encode("utf-8"), key.encode("utf-8"))


async def make_password_hash_async(password: str) -> str:
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(executor, make_password_hash, password)


async def verify_password_async(password: str, stored_hash: str) -> bool:
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(executor, verify_password, password, stored_hash)


# ---------------- API KEY SECRETS ----------------

def generate_api_secret() -> str:
    """New raw API secret: "sk_" followed by 48 hex chars."""
    return API_SECRET_PREFIX + secrets.token_hex(API_SECRET_BYTES)


def hash_api_secret(secret: str) -> str:
    """Unsalted sha256; the secret carries 192 bits of entropy on its own."""
    return hashlib.sha256(secret.encode("utf-8")).hexdigest()


def verify_api_secret(secret: str, stored_hash: str) -> bool:
    return hmac.compare_digest(hash_api_secret(secret).encode("utf-8"), (stored_hash or "").encode("utf-8"))
