import csv

from django.contrib import admin
from django.http import HttpResponse

from .models import College, ImportRun, University


class CollegeInline(admin.TabularInline):
    model = College
    extra = 0
    fields = ("aishe_code", "name", "district", "college_type", "management")
    show_change_link = True


@admin.register(University)
class UniversityAdmin(admin.ModelAdmin):
    list_display = ("aishe_code", "name", "state", "district", "year_of_establishment")
    search_fields = ("aishe_code", "name", "state", "district")
    list_filter = ("state",)
    inlines = [CollegeInline]


@admin.register(College)
class CollegeAdmin(admin.ModelAdmin):
    list_display = ("aishe_code", "name", "state", "district", "college_type", "management", "university")
    search_fields = ("aishe_code", "name", "district", "university_name", "university_aishe_code")
    list_filter = ("state", "college_type", "management")
    raw_id_fields = ("university",)
    actions = ("export_unlinked_as_csv",)

    def export_unlinked_as_csv(self, request, queryset):
        """Export selected colleges that have no university link, for manual reconciliation."""
        response = HttpResponse(content_type="text/csv")
        response["Content-Disposition"] = "attachment; filename=unlinked_colleges.csv"
        writer = csv.writer(response)
        writer.writerow(["aishe_code", "name", "university_aishe_code", "university_name", "university_type"])
        for obj in queryset.filter(university__isnull=True):
            writer.writerow([
                obj.aishe_code,
                obj.name,
                obj.university_aishe_code or "",
                obj.university_name or "",
                obj.university_type or "",
            ])
        return response
    export_unlinked_as_csv.short_description = "Export unlinked colleges as CSV"


@admin.register(ImportRun)
class ImportRunAdmin(admin.ModelAdmin):
    list_display = ("action", "status", "source_path", "created_at", "started_at", "finished_at")
    search_fields = ("action", "source_path")
    list_filter = ("action", "status")
    readonly_fields = ("stats", "error")
