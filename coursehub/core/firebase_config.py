import firebase_admin
from firebase_admin import credentials
import os
import logging
from typing import Optional

from coursehub.core.config import settings

logger = logging.getLogger(__name__)

_firebase_app_initialized = False

def initialize_firebase_app(credentials_path: Optional[str] = None):
    """
    Initializes the Firebase Admin SDK using service account credentials.
    The path to the service account JSON file comes from the argument or,
    if omitted, from the GOOGLE_APPLICATION_CREDENTIALS setting.
    """
    global _firebase_app_initialized
    if _firebase_app_initialized:
        logger.info("Firebase app already initialized.")
        return firebase_admin.get_app()

    cred_path = credentials_path or settings.GOOGLE_APPLICATION_CREDENTIALS
    try:
        if not cred_path:
            raise ValueError("GOOGLE_APPLICATION_CREDENTIALS is not set.")
        if not os.path.exists(cred_path):
            raise FileNotFoundError(f"Firebase service account key file not found at path: {cred_path}")

        cred = credentials.Certificate(cred_path)
        firebase_admin.initialize_app(cred)
        _firebase_app_initialized = True
        logger.info("Firebase Admin SDK initialized successfully.")
        return firebase_admin.get_app()
    except Exception as e:
        logger.error(f"Error initializing Firebase Admin SDK: {e}", exc_info=True)
        raise

def get_firebase_app():
    """
    Returns the initialized Firebase app.
    Initializes the app if it hasn't been initialized yet.
    """
    if not _firebase_app_initialized:
        return initialize_firebase_app()
    return firebase_admin.get_app()
