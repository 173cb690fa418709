import logging

import firebase_admin
from firebase_admin import credentials

from careerpath.config import Settings

logger = logging.getLogger(__name__)


def get_firebase_app(settings: Settings) -> firebase_admin.App:
    """
    Return the default Firebase app, initializing it on first use.
    Uses the service-account fields from settings when they are set,
    otherwise Application Default Credentials.
    """
    try:
        return firebase_admin.get_app()
    except ValueError:
        pass

    options = {}
    if settings.firebase_storage_bucket:
        options["storageBucket"] = settings.firebase_storage_bucket
    if settings.firebase_project_id:
        options["projectId"] = settings.firebase_project_id

    if settings.firebase_private_key and settings.firebase_client_email:
        cred = credentials.Certificate({
            "type": "service_account",
            "project_id": settings.firebase_project_id,
            "private_key": settings.firebase_private_key.replace('\\n', '\n'),
            "client_email": settings.firebase_client_email,
            "token_uri": "https://oauth2.googleapis.com/token",
        })
    else:
        cred = credentials.ApplicationDefault()

    app = firebase_admin.initialize_app(cred, options)
    logger.info("Firebase app initialized", extra={"project_id": settings.firebase_project_id})
    return app
