from prometheus_client import Counter, Histogram


class TicketMarketMetrics:
    """
    Ticket Market Core Metrics Collector

    Tracks reservation outcomes, payment reconciliation, refunds and
    expiry sweeps.
    """

    def __init__(self):
        # ========== Reservation Metrics ==========
        self.booking_requests = Counter(
            'ticket_market_booking_requests_total',
            'Total booking attempts',
            ['class_type', 'result'],  # result: held/sold_out/already_holding/not_found
        )

        self.booking_duration = Histogram(
            'ticket_market_booking_duration_seconds',
            'Booking atomic unit duration',
            ['class_type'],
            buckets=[0.005, 0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.0, 5.0],
        )

        # ========== Payment Metrics ==========
        self.payment_orders_created = Counter(
            'ticket_market_payment_orders_created_total',
            'Payment orders opened with the gateway',
            ['subject_kind', 'result'],
        )

        self.payment_verifications = Counter(
            'ticket_market_payment_verifications_total',
            'Payment verification calls',
            ['subject_kind', 'result'],  # applied/replayed/hold_expired/listing_stale/invalid_signature
        )

        self.refunds = Counter(
            'ticket_market_refunds_total',
            'Refunds issued',
            ['reason', 'result'],  # reason: owner_return/orphaned_payment
        )

        # ========== Resale / Gate Metrics ==========
        self.resale_listings = Counter(
            'ticket_market_resale_listings_total',
            'Resale listing changes',
            ['action'],  # listed/cancelled
        )

        self.check_ins = Counter(
            'ticket_market_check_ins_total',
            'Gate check-ins',
            ['result'],  # admitted/already_used
        )

        # ========== Expiry Metrics ==========
        self.holds_reclaimed = Counter(
            'ticket_market_holds_reclaimed_total', 'Expired holds returned to inventory'
        )

        self.expiry_sweep_duration = Histogram(
            'ticket_market_expiry_sweep_duration_seconds',
            'Expiry sweep duration',
            buckets=[0.01, 0.05, 0.1, 0.5, 1.0, 5.0, 10.0, 30.0],
        )

        self.activation_hook = Counter(
            'ticket_market_activation_hook_total',
            'Ticket activated hook deliveries',
            ['result'],  # delivered/failed/skipped
        )

    # ========== Helper Methods ==========

    def record_booking(self, *, class_type: str, result: str, duration: float | None = None):
        self.booking_requests.labels(class_type=class_type, result=result).inc()
        if duration is not None:
            self.booking_duration.labels(class_type=class_type).observe(duration)

    def record_payment_order(self, *, subject_kind: str, result: str):
        self.payment_orders_created.labels(subject_kind=subject_kind, result=result).inc()

    def record_verification(self, *, subject_kind: str, result: str):
        self.payment_verifications.labels(subject_kind=subject_kind, result=result).inc()

    def record_refund(self, *, reason: str, result: str):
        self.refunds.labels(reason=reason, result=result).inc()

    def record_listing(self, *, action: str):
        self.resale_listings.labels(action=action).inc()

    def record_check_in(self, *, result: str):
        self.check_ins.labels(result=result).inc()

    def record_expiry_sweep(self, *, reclaimed: int, duration: float):
        self.holds_reclaimed.inc(reclaimed)
        self.expiry_sweep_duration.observe(duration)

    def record_activation_hook(self, *, result: str):
        self.activation_hook.labels(result=result).inc()


# Global metrics instance
metrics = TicketMarketMetrics()
