# Vercel Python Serverless Function: replace columns + rows
# POST /api/admin_update with "Authorization: Bearer <token>", body {columns, rows}

from python_medref.handlers import handle_admin_update, serverless

handler = serverless(handle_admin_update)
