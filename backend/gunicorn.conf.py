# Bind & workers
bind = "0.0.0.0:8000"
# Token stores are per-process with TOKEN_STORE_BACKEND=memory; use one worker there.
workers = 2
threads = 4  # per-user locks serialize same-user requests within a worker
timeout = 30
graceful_timeout = 30
keepalive = 5

wsgi_app = "tokenauth.wsgi:app"

# Logs to stdout/stderr (collected by Docker)
accesslog = "-"
errorlog = "-"
loglevel = "info"

# Trust proxy headers from the gateway
forwarded_allow_ips = "*"
proxy_protocol = False
