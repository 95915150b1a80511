import django_filters

from modules.catalog.models import Category, Subcategory


class CategoryFilter(django_filters.FilterSet):
    name = django_filters.CharFilter(field_name="name", lookup_expr="icontains")
    active = django_filters.BooleanFilter(field_name="active")

    class Meta:
        model = Category
        fields = ["name", "active"]


class SubcategoryFilter(django_filters.FilterSet):
    name = django_filters.CharFilter(field_name="name", lookup_expr="icontains")
    category = django_filters.NumberFilter(field_name="category_id")
    active = django_filters.BooleanFilter(field_name="active")

    class Meta:
        model = Subcategory
        fields = ["name", "category", "active"]
