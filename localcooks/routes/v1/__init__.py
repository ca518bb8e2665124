# localcooks/routes/v1/__init__.py
