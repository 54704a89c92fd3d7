"""GraphQL documents for catalog reads."""

PRODUCTS_QUERY = """
query products($first: Int!, $sortKey: ProductSortKeys) {
  products(first: $first, sortKey: $sortKey) {
    edges {
      node {
        id
        title
        handle
        category { id name }
        priceRange { minVariantPrice { amount } }
        images(first: 1) { edges { node { url } } }
      }
    }
  }
}
"""

PRODUCT_QUERY = """
query getProduct($id: ID!) {
  node(id: $id) {
    ... on Product {
      id
      title
      handle
      options(first: 10) { id name values }
      variants(first: 20) {
        nodes {
          id
          title
          availableForSale
          price { amount currencyCode }
          selectedOptions { name value }
        }
      }
    }
  }
}
"""
