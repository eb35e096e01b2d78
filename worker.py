"""
RQ worker entry point — runs the detached inbound-email agent jobs.

Usage: python worker.py
"""
from rq import Queue, Worker

from smartcrm.extensions import redis_client
from smartcrm.logging_config import configure_logging


def main():
    configure_logging(service='worker')
    Worker([Queue(connection=redis_client)], connection=redis_client).work()


if __name__ == '__main__':
    main()
