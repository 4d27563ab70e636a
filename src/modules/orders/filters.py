import django_filters

from modules.orders.models import Order


class OrderFilter(django_filters.FilterSet):
    status = django_filters.CharFilter(field_name="status", lookup_expr="iexact")
    user = django_filters.NumberFilter(field_name="user_id")
    courier = django_filters.UUIDFilter(field_name="courier_id")
    start_date = django_filters.DateFilter(field_name="created_at", lookup_expr="date__gte")
    end_date = django_filters.DateFilter(field_name="created_at", lookup_expr="date__lte")
    min_total = django_filters.NumberFilter(field_name="total_price", lookup_expr="gte")
    max_total = django_filters.NumberFilter(field_name="total_price", lookup_expr="lte")
    payment_status = django_filters.CharFilter(lookup_expr="iexact")
    delivered_after = django_filters.IsoDateTimeFilter(
        field_name="delivered_at", lookup_expr="gte"
    )

    class Meta:
        model = Order
        fields = [
            "status",
            "user",
            "courier",
            "start_date",
            "end_date",
            "min_total",
            "max_total",
            "payment_status",
            "delivered_after",
        ]
