# Vercel Python Serverless Function for health check
# GET /api/health

from python_medref.handlers import handle_health, serverless

handler = serverless(handle_health)
