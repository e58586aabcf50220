from rest_framework import serializers

# Report payloads keep the camelCase keys the web client reads.


class TopValueSerializer(serializers.Serializer):
    value = serializers.CharField()
    count = serializers.IntegerField()
    percentage = serializers.IntegerField()


class FieldAnalyticsSerializer(serializers.Serializer):
    fieldId = serializers.CharField(source="field_id")
    fieldLabel = serializers.CharField(source="field_label")
    fieldType = serializers.CharField(source="field_type")
    completionRate = serializers.FloatField(source="completion_rate")
    totalResponses = serializers.IntegerField(source="total_responses")
    # already quantized to two places; str() keeps every digit
    averageValue = serializers.CharField(source="average_value", allow_null=True)
    topValues = TopValueSerializer(source="top_values", many=True)


class TrendPointSerializer(serializers.Serializer):
    date = serializers.CharField(source="label")
    count = serializers.IntegerField()


class RecentResponseSerializer(serializers.Serializer):
    id = serializers.CharField()
    userId = serializers.CharField(source="user_id", allow_null=True)
    userName = serializers.CharField(source="user_name")
    userEmail = serializers.CharField(source="user_email")
    submittedAt = serializers.DateTimeField(source="submitted_at")
    data = serializers.JSONField()


class AnalyticsReportSerializer(serializers.Serializer):
    formId = serializers.CharField(source="form_id")
    formTitle = serializers.CharField(source="form_title")
    totalResponses = serializers.IntegerField(source="total_responses")
    completionRate = serializers.IntegerField(source="completion_rate")
    averageCompletionTime = serializers.IntegerField(source="average_completion_time")
    fieldAnalytics = FieldAnalyticsSerializer(source="field_analytics", many=True)
    responseTrends = TrendPointSerializer(source="response_trends", many=True)
    recentResponses = RecentResponseSerializer(source="recent_responses", many=True)
