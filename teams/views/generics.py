from rest_framework.response import Response
from rest_framework import status


def api_error(message: str, status_code=status.HTTP_400_BAD_REQUEST):
    """
    Small helper to standardize ad-hoc error responses across the teams app.
    Always returns: {"error": "<message>"} with the given status code.

    Refusals from teams.services / teams.workflow are raised as
    TeamActionError instead and rendered by core.exceptions.
    """
    return Response({"error": message}, status=status_code)
