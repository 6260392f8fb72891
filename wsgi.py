from timecapsule import create_app
from timecapsule.scheduler import start_scheduler
from werkzeug.middleware.proxy_fix import ProxyFix

app = create_app()
app.wsgi_app = ProxyFix(app.wsgi_app, x_proto=1, x_for=1, x_host=1, x_port=1, x_prefix=1)

if app.config.get("SCHEDULER_ENABLED"):
    start_scheduler(app, app.extensions["sweep_runner"])
