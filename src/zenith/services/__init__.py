"""Domain services: balance engine, summaries, exchange rates and local auth."""
