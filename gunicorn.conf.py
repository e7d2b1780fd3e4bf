# gunicorn.conf.py
import os

wsgi_app = "upload_gateway.main:app"
bind = f"0.0.0.0:{os.getenv('PORT', '8080')}"
# let op: de upload-tracker leeft per proces; meer workers = meer losse trackers
workers = int(os.getenv("WEB_CONCURRENCY", "1"))
threads = int(os.getenv("WEB_THREADS", "4"))
worker_class = "uvicorn.workers.UvicornWorker"
preload_app = False
timeout = 120
graceful_timeout = 30
keepalive = 5
accesslog = "-"
errorlog = "-"
loglevel = "info"
