# Request board business rules
REQUEST_BOARD_SETTINGS = {
    # Request fields
    "TITLE_MAX_LENGTH": 100,
    "DESCRIPTION_MAX_LENGTH": 1000,
    "MAX_ITEM_QUANTITY": 999_999,
    # Prices (in the currency of the record)
    "MAX_PRICE": 999_999,
    # Offers and negotiation messages
    "MESSAGE_MAX_LENGTH": 500,
    # Listing
    "DEFAULT_PAGE_SIZE": 20,
    "MAX_PAGE_SIZE": 50,
}
