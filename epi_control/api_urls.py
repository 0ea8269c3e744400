from django.urls import path

from apps.deliveries.api_views import (
    DeliveryCancelView,
    DeliveryIssueView,
    DeliveryReturnView,
    DeliverySignView,
)
from apps.inventory.api_views import (
    DirectAdjustmentView,
    NoteCancelView,
    NoteConcludeView,
    NoteCreateView,
    NoteItemAddView,
    NoteItemRemoveView,
)

urlpatterns = [
    # Movement notes
    path('notes/', NoteCreateView.as_view(), name='api-note-create'),
    path('notes/<int:pk>/items/', NoteItemAddView.as_view(), name='api-note-item-add'),
    path('notes/<int:pk>/items/<int:item_pk>/', NoteItemRemoveView.as_view(), name='api-note-item-remove'),
    path('notes/<int:pk>/conclude/', NoteConcludeView.as_view(), name='api-note-conclude'),
    path('notes/<int:pk>/cancel/', NoteCancelView.as_view(), name='api-note-cancel'),

    # Stock
    path('stock/adjustments/', DirectAdjustmentView.as_view(), name='api-stock-adjustment'),

    # Deliveries
    path('deliveries/', DeliveryIssueView.as_view(), name='api-delivery-issue'),
    path('deliveries/<uuid:pk>/sign/', DeliverySignView.as_view(), name='api-delivery-sign'),
    path('deliveries/<uuid:pk>/cancel/', DeliveryCancelView.as_view(), name='api-delivery-cancel'),
    path('deliveries/<uuid:pk>/returns/', DeliveryReturnView.as_view(), name='api-delivery-return'),
]
