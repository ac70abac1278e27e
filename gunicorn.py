import os
import shutil
import prometheus_client.multiprocess

bind = os.environ.get("GUNICORN_BIND", "0.0.0.0:8000")
workers = int(os.environ.get("GUNICORN_WORKERS", "4"))
wsgi_app = "wsgi:app"


def on_starting(server):
    prometheus_dir = os.environ.setdefault("PROMETHEUS_MULTIPROC_DIR", "var/prometheus")

    if os.path.exists(prometheus_dir):
        shutil.rmtree(prometheus_dir)
    os.makedirs(prometheus_dir, exist_ok=True)


def child_exit(server, worker):
    # this keeps livesum and liveall accurate
    # other metrics will hang around until restart
    prometheus_client.multiprocess.mark_process_dead(worker.pid)
