"""GraphQL documents for cart operations."""

# Upper bound on lines read per cart
CART_LINES_LIMIT = 20

CART_CREATE = """
mutation cartCreate($lines: [CartLineInput!]) {
  cartCreate(input: { lines: $lines }) {
    cart { id }
    userErrors { field message }
  }
}
"""

CART_LINES_ADD = """
mutation cartLinesAdd($cartId: ID!, $lines: [CartLineInput!]!) {
  cartLinesAdd(cartId: $cartId, lines: $lines) {
    cart { id }
    userErrors { field message }
  }
}
"""

CART_LINES_UPDATE = """
mutation cartLinesUpdate($cartId: ID!, $lines: [CartLineUpdateInput!]!) {
  cartLinesUpdate(cartId: $cartId, lines: $lines) {
    cart { id }
    userErrors { field message }
  }
}
"""

CART_LINES_REMOVE = """
mutation cartLinesRemove($cartId: ID!, $lineIds: [ID!]!) {
  cartLinesRemove(cartId: $cartId, lineIds: $lineIds) {
    cart { id }
    userErrors { field message }
  }
}
"""

CART_QUERY = (
    """
query cart($cartId: ID!) {
  cart(id: $cartId) {
    id
    checkoutUrl
    cost {
      totalAmount { amount }
    }
    lines(first: %d) {
      edges {
        node {
          id
          quantity
          attributes { key value }
          cost {
            totalAmount { amount }
          }
          merchandise {
            ... on ProductVariant {
              id
              title
              image { url }
              price { amount }
              selectedOptions { name value }
              product {
                id
                title
                category { id name }
                images(first: 1) { edges { node { url } } }
              }
            }
          }
        }
      }
    }
  }
}
"""
    % CART_LINES_LIMIT
)
