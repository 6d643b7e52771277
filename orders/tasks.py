"""
Celery tasks for order processing.

Tasks:
    - generate_daily_order_report: Per-status counts and revenue for the previous day
"""
import logging
from datetime import timedelta

from celery import shared_task
from django.db import models
from django.db.models import Count, Sum
from django.utils import timezone

logger = logging.getLogger(__name__)


@shared_task
def generate_daily_order_report():
    """
    Generate daily order statistics report.

    Scheduled via Celery Beat (CELERY_BEAT_SCHEDULE) for daily execution.
    Revenue counts orders that were paid: PROCESSING, DELIVERY and COMPLETED.
    """
    from orders.models import Order

    today = timezone.localdate()
    yesterday = today - timedelta(days=1)

    orders = Order.objects.filter(created_at__date=yesterday)

    revenue_statuses = [Order.Status.PROCESSING, Order.Status.DELIVERY, Order.Status.COMPLETED]
    totals = orders.aggregate(
        total_orders=Count('id'),
        total_revenue=Sum('original_total_price', filter=models.Q(status__in=revenue_statuses)),
    )
    counts = dict(orders.order_by().values_list('status').annotate(count=Count('id')))

    stats = {
        'date': yesterday.isoformat(),
        'total_orders': totals['total_orders'],
        'by_status': {value: counts.get(value, 0) for value in Order.Status.values},
        'total_revenue': str(totals['total_revenue'] or '0.00'),
    }

    status_lines = "\n".join(
        f"    {value}: {count}" for value, count in stats['by_status'].items()
    )
    report = f"""
    ===============================================
    DAILY ORDER REPORT - {yesterday}
    ===============================================
    Total Orders: {stats['total_orders']}
{status_lines}
    Total Revenue: {stats['total_revenue']}
    ===============================================
    """

    logger.info(report)

    return stats
