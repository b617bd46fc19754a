from datetime import datetime, timedelta, time

import pytz
from flask import current_app

from app.extensions import db
from app.models import Booking
from app.utils.dates import utcnow

PAYMENT_BUCKETS = ('paid', 'pending', 'failed')


def _empty_bucket():
    bucket = {'totalBookings': 0, 'totalRevenue': 0.0}
    for key in PAYMENT_BUCKETS:
        bucket[key] = {'bookings': 0, 'revenue': 0.0}
    return bucket


def _add(bucket, payment_key, amount):
    bucket['totalBookings'] += 1
    bucket['totalRevenue'] += amount
    bucket[payment_key]['bookings'] += 1
    bucket[payment_key]['revenue'] += amount


def _payment_key(payment_status):
    # A payment still being processed counts as pending
    if payment_status in ('paid', 'failed'):
        return payment_status
    return 'pending'


class StatisticsService:

    @staticmethod
    def get_statistics(as_of: datetime = None):
        """
        Non-cancelled bookings bucketed by creation time into today, this week
        and this month (hotel-local calendar), each split by payment status,
        plus one entry per day of the current month.
        """
        tz = pytz.timezone(current_app.config.get('HOTEL_TIMEZONE', 'UTC'))
        week_start_day = current_app.config.get('WEEK_START_DAY', 6)

        as_of = as_of or utcnow()
        local_today = pytz.utc.localize(as_of).astimezone(tz).date()

        def to_utc(day):
            local_midnight = tz.localize(datetime.combine(day, time.min))
            return local_midnight.astimezone(pytz.utc).replace(tzinfo=None)

        week_start = local_today - timedelta(days=(local_today.weekday() - week_start_day) % 7)
        month_start = local_today.replace(day=1)
        next_month = (month_start + timedelta(days=32)).replace(day=1)

        ranges = {
            'today': (local_today, local_today + timedelta(days=1)),
            'thisWeek': (week_start, week_start + timedelta(days=7)),
            'thisMonth': (month_start, next_month),
        }
        bounds = {name: (to_utc(lo), to_utc(hi)) for name, (lo, hi) in ranges.items()}

        query_start = min(lo for lo, _ in bounds.values())
        query_end = max(hi for _, hi in bounds.values())
        rows = db.session.query(Booking.created_at, Booking.payment_status, Booking.total_price).filter(
            Booking.status != 'cancelled',
            Booking.created_at >= query_start,
            Booking.created_at < query_end
        ).all()

        stats = {name: _empty_bucket() for name in ranges}
        days = []
        day = month_start
        while day < next_month:
            days.append(day)
            day += timedelta(days=1)
        daily = {d: _empty_bucket() for d in days}

        for created_at, payment_status, total_price in rows:
            key = _payment_key(payment_status)
            amount = total_price or 0.0
            for name, (lo, hi) in bounds.items():
                if lo <= created_at < hi:
                    _add(stats[name], key, amount)
            local_day = pytz.utc.localize(created_at).astimezone(tz).date()
            if local_day in daily:
                _add(daily[local_day], key, amount)

        stats['dailyStats'] = [dict(date=d.isoformat(), **daily[d]) for d in days]
        stats['generatedAt'] = as_of.isoformat()
        return stats
