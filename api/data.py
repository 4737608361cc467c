# Vercel Python Serverless Function: medication table read
# GET /api/data -> {columns, rows}

from python_medref.handlers import handle_data, serverless

handler = serverless(handle_data)
