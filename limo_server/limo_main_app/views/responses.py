from rest_framework.response import Response


def error_response(code, message, http_status, **extra):
    return Response({'error': code, 'message': message, **extra}, status=http_status)
