from django.http import JsonResponse


def error_404_view(request, exception):
    return JsonResponse({"success": False, "error": "not_found", "message": "Not found"}, status=404)


def error_500_view(request):
    # Details stay in the server log; callers only get an opaque message
    return JsonResponse(
        {"success": False, "error": "internal_error", "message": "Something went wrong"},
        status=500,
    )
