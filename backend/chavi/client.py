"""
Submission client for the site's forms.

Mirrors what the browser script does on submit: collect the named fields,
run the cheap local checks, send one JSON request, keep the submit button
disabled while it is in flight, and clear the form only when the server
accepted it.
"""
import logging
import math
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional

import requests
from requests.exceptions import RequestException

logger = logging.getLogger(__name__)

FAILURE_MESSAGE = 'Something went wrong. Please try again later.'
INVALID_AMOUNT_MESSAGE = 'Enter a valid amount'


@dataclass
class SubmitControl:
    label: str = 'Submit'
    disabled: bool = False


@dataclass
class Form:
    fields: Dict[str, Any] = field(default_factory=dict)
    submit: SubmitControl = field(default_factory=SubmitControl)

    def collect(self) -> Dict[str, Any]:
        return dict(self.fields)

    def reset(self):
        self.fields = {name: '' for name in self.fields}


@dataclass(frozen=True)
class Action:
    path: str
    busy_label: str
    success_message: str
    check_amount: bool = False


ACTIONS = {
    'subscribe': Action('/api/newsletter', 'Submitting...', 'Subscribed, thank you!'),
    'volunteer': Action('/api/volunteers', 'Submitting...', 'Thank you! We received your volunteer request.'),
    'donate': Action('/api/donations', 'Processing...', 'Donation recorded. You can proceed to payment.', check_amount=True),
    'create_order': Action('/api/create-order', 'Processing...', 'Order created. Opening checkout...', check_amount=True),
    'verify_payment': Action('/api/verify-payment', 'Verifying...', 'Payment successful. Thank you for your support!'),
}


@dataclass
class SubmissionResult:
    ok: bool
    status_code: Optional[int] = None
    data: Any = None
    message: str = ''


class RejectedSubmission(Exception):
    """Server answered with a non-success status."""

    def __init__(self, status_code, data):
        self.status_code = status_code
        self.data = data
        super().__init__(f"server answered {status_code}")


def parse_amount(raw) -> Optional[float]:
    """Positive finite number or None."""
    if raw is None or isinstance(raw, bool):
        return None
    try:
        amount = float(str(raw).strip())
    except ValueError:
        return None
    if not math.isfinite(amount) or amount <= 0:
        return None
    return amount


class SubmissionClient:

    def __init__(self, base_url: str = '', session=None, notify: Optional[Callable[[str], None]] = None):
        self.base_url = base_url.rstrip('/')
        self.session = session or requests.Session()
        self.notify = notify or (lambda message: logger.info("%s", message))

    def subscribe(self, form: Form) -> SubmissionResult:
        return self.submit('subscribe', form)

    def volunteer(self, form: Form) -> SubmissionResult:
        return self.submit('volunteer', form)

    def donate(self, form: Form) -> SubmissionResult:
        return self.submit('donate', form)

    def create_order(self, form: Form) -> SubmissionResult:
        return self.submit('create_order', form)

    def verify_payment(self, form: Form) -> SubmissionResult:
        return self.submit('verify_payment', form)

    def submit(self, action_name: str, form: Form) -> SubmissionResult:
        action = ACTIONS[action_name]
        if form.submit.disabled:
            # a request for this form is still in flight
            return SubmissionResult(ok=False, message='Submission already in progress')

        data = form.collect()
        if action.check_amount and parse_amount(data.get('amount')) is None:
            self.notify(INVALID_AMOUNT_MESSAGE)
            return SubmissionResult(ok=False, message=INVALID_AMOUNT_MESSAGE)

        idle_label = form.submit.label
        form.submit.disabled = True
        form.submit.label = action.busy_label
        try:
            resp = self.session.post(f"{self.base_url}{action.path}", json=data)
            try:
                body = resp.json()
            except ValueError:
                body = None
            if not 200 <= resp.status_code < 300:
                raise RejectedSubmission(resp.status_code, body)
        except (RequestException, RejectedSubmission) as e:
            logger.error("Error submitting %s: %s", action_name, e)
            self.notify(FAILURE_MESSAGE)
            return SubmissionResult(ok=False, status_code=getattr(e, 'status_code', None),
                                    data=getattr(e, 'data', None), message=FAILURE_MESSAGE)
        else:
            self.notify(action.success_message)
            form.reset()
            return SubmissionResult(ok=True, status_code=resp.status_code, data=body, message=action.success_message)
        finally:
            form.submit.disabled = False
            form.submit.label = idle_label
