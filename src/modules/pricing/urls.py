from django.urls import path

from modules.pricing.views import PriceQuoteView

urlpatterns = [
    path("pricing/quote/", PriceQuoteView.as_view(), name="price-quote"),
]
