# arena_project/asgi.py

import os

from django.core.asgi import get_asgi_application

# Must run before anything touches django.conf.settings.
os.environ.setdefault("DJANGO_SETTINGS_MODULE", "arena_project.settings")

# Chat is poll-based, so plain HTTP is the only protocol served here.
application = get_asgi_application()
