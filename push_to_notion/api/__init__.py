"""HTTP surface: FastAPI app receiving Slack interactivity requests."""
