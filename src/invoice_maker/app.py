import logging

from invoice_maker.core.models.invoice import UserProfile
from invoice_maker.core.services.record_store import RecordStore
from invoice_maker.core.services.settings import load_settings, store_path
from invoice_maker.ui.layouts.main_window import MainWindow


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    settings = load_settings()
    user_cfg = settings.get("user") or {}
    user = UserProfile(uid=str(user_cfg.get("uid") or "local"), email=user_cfg.get("email"))
    store = RecordStore(store_path(settings))
    app = MainWindow(settings, store, user)
    app.mainloop()


if __name__ == "__main__":
    main()
