"""Product constants shared by models, DTOs and repositories."""

# Upper bound of PositiveIntegerField on every supported backend.
STOCK_MAX = 2_147_483_647
