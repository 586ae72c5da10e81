"""Record store layer.

Each record kind has one :class:`~wanderlog.state.store.RecordStore`; it is
the single owner of that kind's collection. All transitions go through the
pure reducer in :mod:`wanderlog.state.reducer`.
"""
