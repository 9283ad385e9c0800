"""secretpoll: Kubernetes Secret watch events as a pollable queue."""
