"""Wiring: one instance of every store and service, built from Settings."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from spincity.core.config import Settings
from spincity.core.identity import IdentityChannel
from spincity.core.notifier import MessageBoard
from spincity.core.utils import Clock
from spincity.domain.entities import CONTACTS, INVENTORY, RENTALS, REPAIRS, SALES, USERS, VENDORS
from spincity.repositories.factory import Stores, build_stores
from spincity.services.auth_service import AuthService
from spincity.services.backup_service import BackupService
from spincity.services.record_service import RecordService
from spincity.services.report_service import ReportService
from spincity.services.sales_service import SalesService
from spincity.services.session_service import SessionBootstrapper
from spincity.services.settings_service import SettingsStore
from spincity.services.vendor_service import VendorService


@dataclass
class ServiceContainer:
    settings: Settings
    stores: Stores
    messages: MessageBoard
    identity: IdentityChannel
    settings_store: SettingsStore
    auth: AuthService
    sales: SalesService
    vendors: VendorService
    session: SessionBootstrapper
    records: RecordService
    backup: BackupService
    reports: ReportService


def build_container(
    settings: Settings,
    *,
    stores: Optional[Stores] = None,
    clock: Optional[Clock] = None,
) -> ServiceContainer:
    stores = stores or build_stores(settings)
    messages = MessageBoard()
    identity = IdentityChannel()
    settings_store = SettingsStore(stores.kv)
    auth = AuthService(stores.collection(USERS), settings_store, settings.default_admin_email)
    sales = SalesService(stores.collection(SALES), stores.collection(INVENTORY))
    vendors = VendorService(stores.collection(VENDORS), stores.collection(INVENTORY))
    session = SessionBootstrapper(
        stores,
        settings_store,
        auth,
        identity_source=identity if stores.remote else None,
        announce=messages.announce,
        reconcile=sales.reconcile_inventory if settings.reconcile_on_load else None,
    )
    records = RecordService(stores, sales=sales, auth=auth, vendors=vendors, session=session, clock=clock)
    return ServiceContainer(
        settings=settings,
        stores=stores,
        messages=messages,
        identity=identity,
        settings_store=settings_store,
        auth=auth,
        sales=sales,
        vendors=vendors,
        session=session,
        records=records,
        backup=BackupService(stores, settings_store),
        reports=ReportService(
            stores.collection(CONTACTS), stores.collection(RENTALS), stores.collection(REPAIRS), clock=clock
        ),
    )
