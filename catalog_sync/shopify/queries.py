# catalog_sync/shopify/queries.py
# Admin GraphQL documents used by the reconciler and the existing-product lookup.

FIND_PRODUCTS_QUERY = """
query Products($query: String!) {
  products(first: 10, query: $query) {
    edges {
      node {
        id
        title
      }
    }
  }
}
"""

PRODUCT_CREATE_MUTATION = """
mutation createProduct($input: ProductInput!, $media: [CreateMediaInput!]) {
  productCreate(input: $input, media: $media) {
    product {
      id
      title
      variants(first: 5) {
        nodes {
          id
          title
          selectedOptions {
            name
            value
          }
        }
      }
      media(first: 50) {
        nodes {
          id
          alt
        }
      }
    }
    userErrors {
      field
      message
    }
  }
}
"""

PRODUCT_CREATE_MEDIA_MUTATION = """
mutation productCreateMedia($media: [CreateMediaInput!]!, $productId: ID!) {
  productCreateMedia(media: $media, productId: $productId) {
    media {
      id
      alt
    }
    mediaUserErrors {
      field
      message
    }
    product {
      id
      title
    }
  }
}
"""

VARIANTS_BULK_UPDATE_MUTATION = """
mutation productVariantsBulkUpdate($productId: ID!, $variants: [ProductVariantsBulkInput!]!) {
  productVariantsBulkUpdate(productId: $productId, variants: $variants) {
    product {
      id
    }
    productVariants {
      id
      title
      sku
    }
    userErrors {
      field
      message
    }
  }
}
"""

VARIANTS_BULK_CREATE_MUTATION = """
mutation createProductVariants($productId: ID!, $variants: [ProductVariantsBulkInput!]!) {
  productVariantsBulkCreate(productId: $productId, variants: $variants) {
    productVariants {
      id
      title
      sku
    }
    userErrors {
      field
      message
    }
  }
}
"""
