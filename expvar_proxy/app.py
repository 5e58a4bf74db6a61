"""Custom Flask application class with typed container attribute."""

from flask import Flask

from expvar_proxy.services.container import ServiceContainer


class App(Flask):
    container: ServiceContainer
