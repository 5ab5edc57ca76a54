"""Job automation: configs, job records and queries, a Redis queue, a scheduler, a worker, an e-mail task and a Flask API."""

__version__ = "0.1.0"