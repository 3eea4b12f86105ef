"""
ASGI config for the vehicle_marketplace project.
"""

import os

from django.core.asgi import get_asgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'vehicle_marketplace.settings')

application = get_asgi_application()
