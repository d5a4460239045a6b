"""HTTP service for caption processing, export, and generation jobs."""
