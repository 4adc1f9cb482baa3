from django.db.models import Q
from rest_framework import status, permissions, viewsets
from rest_framework.response import Response
from rest_framework.views import APIView
from .models import IntegrityAdvocateBlock
from .overrides import set_override
from .serializers import IntegrityAdvocateBlockSerializer, SetOverrideSerializer, SetOverrideResultSerializer


class IntegrityAdvocateBlockViewSet(viewsets.ReadOnlyModelViewSet):
    queryset = IntegrityAdvocateBlock.objects.all()
    serializer_class = IntegrityAdvocateBlockSerializer
    permission_classes = [permissions.IsAdminUser]

    def get_queryset(self):
        queryset = super().get_queryset()
        course_id = self.request.query_params.get('course')
        if course_id:
            queryset = queryset.filter(Q(course_id=course_id) | Q(module__course_id=course_id))
        return queryset


class SetOverrideView(APIView):
    """Override a participant's session status. Problems come back as warnings, not errors."""

    permission_classes = [permissions.IsAuthenticated]

    def post(self, request):
        serializer = SetOverrideSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        result = set_override(
            status=data['status'],
            reason=data['reason'],
            target_user_id=data['target_user_id'],
            override_user_id=data['override_user_id'],
            block_instance_id=data['block_instance_id'],
            module_id=data['module_id'],
            requesting_user=request.user,
        )
        return Response(SetOverrideResultSerializer(result).data, status=status.HTTP_200_OK)
