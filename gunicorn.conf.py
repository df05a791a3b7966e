import os

# Links and tokens live in process memory: one worker, concurrency via threads
workers = 1
threads = int(os.environ.get('GUNICORN_THREADS', '8'))
worker_class = "gthread"
preload_app = True
bind = os.environ.get('BIND', ':8000')
wsgi_app = "linkgate:create_app()"
# Client address comes from ProxyFix (TRUSTED_PROXY_HOPS), not from gunicorn
forwarded_allow_ips = os.environ.get('FORWARDED_ALLOW_IPS', '127.0.0.1')
# Keep-alive tuning
timeout = 30
keepalive = 75
# Access logging
accesslog = "-"
errorlog = "-"
loglevel = os.environ.get('LOG_LEVEL', 'info').lower()
