"""Dashboard app: session, credentials, controller and HTTP surface."""
