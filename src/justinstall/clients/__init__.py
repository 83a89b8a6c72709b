"""Network clients: HTTPS transport, GitHub release metadata and page scraping."""
