"""Application wiring: dispatcher, middlewares and the polling loop."""
