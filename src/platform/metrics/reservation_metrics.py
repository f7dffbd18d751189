from prometheus_client import Counter, Histogram


class ReservationMetrics:
    """
    Reservation Store Metrics Collector

    Tracks repository operations against ScyllaDB and confirmation number generation
    """

    def __init__(self):
        # ========== Repository Operation Metrics ==========
        self.repo_operations = Counter(
            'reservation_repo_operations_total',
            'Total reservation repository operations',
            ['operation', 'result'],  # result: success/timeout/rejected/error
        )

        self.repo_operation_duration = Histogram(
            'reservation_repo_operation_duration_seconds',
            'Reservation repository operation duration',
            ['operation'],
            buckets=[0.001, 0.005, 0.01, 0.05, 0.1, 0.5, 1.0, 2.0, 5.0],
        )

        # ========== Confirmation Number Metrics ==========
        self.confirmation_number_collisions = Counter(
            'reservation_confirmation_number_collisions_total',
            'Generated confirmation numbers that were already taken',
        )

    # ========== Helper Methods ==========

    def record_operation(self, *, operation: str, result: str, duration: float):
        self.repo_operations.labels(operation=operation, result=result).inc()
        self.repo_operation_duration.labels(operation=operation).observe(duration)

    def record_confirmation_number_collision(self):
        self.confirmation_number_collisions.inc()


# Global metrics instance
metrics = ReservationMetrics()
