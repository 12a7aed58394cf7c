"""Command-line helpers: colour option, completion, endpoints, metrics and server start-up."""