from rupay.services.store import DocumentStore


def referral_summary(user_id, store=None):
    """Referral code, shareable link suffix and number of referred sign-ups.

    Referrals are a link between accounts only; no commission is computed.
    """
    store = store or DocumentStore()
    referred = store.query("users", [("referred_by_user_id", "==", user_id)])
    return {
        "referral_code": user_id,
        "referral_path": f"/register?ref={user_id}",
        "referred_count": len(referred),
    }
