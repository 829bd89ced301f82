import logging

from infrastructure.observability.tracing import get_tracer
from infrastructure.payments import PaymentProviderInterface, WebhookEvent, WebhookVerificationException
from marketplace.infra.observability.metrics import webhook_events_total
from marketplace.ordering.domain.results import WebhookOutcome
from marketplace.ordering.domain.services.order_service import OrderService
from marketplace.services.base import BaseService, ErrorCodes, ServiceResult, service_err, service_ok

logger = logging.getLogger(__name__)
tracer = get_tracer(__name__)


class WebhookService(BaseService):
    """
    Verifies gateway webhooks and applies them to orders.

    Handled events:
    - payment_intent.succeeded: order paid, status processing
    - payment_intent.payment_failed: payment failed, order cancelled, stock restored
    - charge.dispute.created: logged for manual follow-up

    Anything else is acknowledged and ignored.
    """

    def __init__(self, payment_provider: PaymentProviderInterface, order_service: OrderService):
        super().__init__()
        self.payment_provider = payment_provider
        self.order_service = order_service

    def handle(self, payload: bytes, signature: str) -> ServiceResult[WebhookOutcome]:
        try:
            event = self.payment_provider.verify_webhook(payload, signature)
        except WebhookVerificationException as e:
            logger.warning(f"Webhook signature verification failed: {e}")
            return service_err(ErrorCodes.WEBHOOK_SIGNATURE_INVALID, "Invalid webhook signature")
        return service_ok(self.process_event(event))

    def process_event(self, event: WebhookEvent) -> WebhookOutcome:
        """Dispatch a verified event to its handler."""
        event_type = event.event_type
        webhook_events_total.labels(event_type=event_type or "unknown").inc()

        with tracer.start_as_current_span("WebhookService.process_event") as span:
            span.set_attribute("event.type", event_type)
            span.set_attribute("event.id", event.event_id)
            logger.info(f"WebhookService: Processing event {event.event_id} of type: {event_type}")

            if event_type == "payment_intent.succeeded":
                return self._handle_payment_intent_succeeded(event)
            elif event_type == "payment_intent.payment_failed":
                return self._handle_payment_intent_failed(event)
            elif event_type == "charge.dispute.created":
                return self._handle_dispute_created(event)

            logger.info(f"WebhookService: Unhandled event type: {event_type}")
            return WebhookOutcome(event_type=event_type, handled=False, detail="Ignored")

    def _handle_payment_intent_succeeded(self, event: WebhookEvent) -> WebhookOutcome:
        intent = event.data
        metadata = intent.get("metadata") or {}
        return self.order_service.mark_payment_succeeded(intent.get("id", ""), order_id=metadata.get("order_id"))

    def _handle_payment_intent_failed(self, event: WebhookEvent) -> WebhookOutcome:
        intent = event.data
        metadata = intent.get("metadata") or {}
        error = (intent.get("last_payment_error") or {}).get("message", "unknown reason")
        logger.warning(f"WebhookService: Payment intent {intent.get('id')} failed: {error}")
        return self.order_service.mark_payment_failed(intent.get("id", ""), order_id=metadata.get("order_id"))

    def _handle_dispute_created(self, event: WebhookEvent) -> WebhookOutcome:
        dispute = event.data
        logger.warning(
            f"WebhookService: Dispute {dispute.get('id')} opened for charge {dispute.get('charge')} "
            f"(amount={dispute.get('amount')}, reason={dispute.get('reason')})"
        )
        return WebhookOutcome(event_type=event.event_type, handled=True, detail="Dispute logged")
