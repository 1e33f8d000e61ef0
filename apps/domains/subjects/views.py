from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.core.permissions import IsAdminOrStaff
from apps.domains.subjects.models import Subject
from apps.domains.subjects.serializers import SubjectCreateSerializer, SubjectSerializer
from apps.domains.subjects.services import create_subject


class SubjectListCreateView(APIView):
    """
    GET  : every authenticated role can list subjects
    POST : admin only
    """

    def get_permissions(self):
        if self.request.method == "POST":
            return [IsAuthenticated(), IsAdminOrStaff()]
        return [IsAuthenticated()]

    def get(self, request):
        qs = Subject.objects.prefetch_related("teachers").order_by("name")
        return Response(SubjectSerializer(qs, many=True).data)

    def post(self, request):
        ser = SubjectCreateSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        subject = create_subject(**ser.validated_data)
        return Response(SubjectSerializer(subject).data, status=status.HTTP_201_CREATED)
