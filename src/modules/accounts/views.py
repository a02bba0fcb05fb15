from __future__ import annotations

from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from modules.accounts.permissions import account_for_request
from modules.accounts.serializers import AccountSerializer


class MeView(APIView):
    """Returns the business account behind the current JWT.

    * No token          -> 401
    * No linked account -> 404
    * Otherwise         -> 200 with the account and its role
    """

    permission_classes = [IsAuthenticated]

    def get(self, request: Request) -> Response:
        account = account_for_request(request)
        if account is None:
            return Response(
                {"detail": "No active account is linked to this user."},
                status=status.HTTP_404_NOT_FOUND,
            )
        return Response(AccountSerializer(account).data)
