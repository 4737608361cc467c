# Vercel Python Serverless Function: admin login
# POST /api/admin_auth {password} -> {token}

from python_medref.handlers import handle_admin_auth, serverless

handler = serverless(handle_admin_auth)
