"""
Weather Station Backend
=======================

This is the Python package for the backend API.

HOW IT'S ORGANIZED:
------------------
- models/    = Data structures (what does a reading / snapshot look like?)
- db/        = MongoDB storage adapter
- services/  = Workers (Open-Meteo, sensor ingest, Prometheus metrics)
- routers/   = API endpoints (the doors into our app)
- config.py  = Environment settings and data source profiles
- main.py    = Puts it all together and starts the server
"""
