import sys

import pytest
from PyQt6.QtCore import QCoreApplication


@pytest.fixture(scope="session")
def qapp():
    app = QCoreApplication.instance()
    if app is None:
        app = QCoreApplication(sys.argv)
    yield app


class DeferredRunner:
    """Collects fetch jobs so a test decides when (and in which order) they complete."""

    def __init__(self):
        self.jobs = []

    def __call__(self, job):
        self.jobs.append(job)

    def complete(self, index: int):
        self.jobs[index]()

    def complete_all(self):
        for job in list(self.jobs):
            job()


@pytest.fixture
def deferred_runner():
    return DeferredRunner()


@pytest.fixture
def immediate_runner():
    def run(job):
        job()

    return run
