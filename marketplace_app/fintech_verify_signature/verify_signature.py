import hashlib
import hmac


class FintechsVerifySignature:
    @staticmethod
    def expected_razorpay_signature(order_id: str, payment_id: str, secret: str) -> str:
        return hmac.new(
            secret.encode(),
            f"{order_id}|{payment_id}".encode(),
            hashlib.sha256,
        ).hexdigest()

    @staticmethod
    def verify_razorpay_signature(
        order_id: str, payment_id: str, signature: str | None, secret: str | None
    ) -> bool:
        if not signature or not secret:
            return False

        expected = FintechsVerifySignature.expected_razorpay_signature(
            order_id, payment_id, secret
        )
        return hmac.compare_digest(expected, signature)
