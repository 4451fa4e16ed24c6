"""GraphQL query text for the Hashnode public API.

Queries are assembled from shared field selections; the posts query is built
on demand because comments, co-authors, table of contents and publication
metadata are optional selections.
"""

from __future__ import annotations

AUTHOR_FIELDS = """
    id
    name
    username
    profilePicture
"""

PAGE_INFO_FIELDS = """
    pageInfo {
      hasNextPage
      endCursor
    }
"""

TAG_FIELDS = """
    tags {
      id
      name
      slug
    }
"""

COVER_IMAGE_FIELDS = """
    coverImage {
      url
      attribution
      isPortrait
      isAttributionHidden
    }
"""

TABLE_OF_CONTENTS_FIELDS = """
    features {
      tableOfContents {
        isEnabled
        items {
          id
          level
          parentId
          slug
          title
        }
      }
    }
"""

POST_FIELDS = f"""
    id
    cuid
    title
    subtitle
    brief
    slug
    url
    {COVER_IMAGE_FIELDS}
    publishedAt
    updatedAt
    readTimeInMinutes
    views
    reactionCount
    responseCount
    replyCount
    hasLatexInPost
    author {{
      {AUTHOR_FIELDS}
      bio {{
        html
        text
      }}
      socialMediaLinks {{
        website
        github
        twitter
        linkedin
      }}
      followersCount
    }}
    {TAG_FIELDS}
    seo {{
      title
      description
    }}
    ogMetaData {{
      image
    }}
    series {{
      id
      name
      slug
    }}
    preferences {{
      disableComments
      stickCoverToBottom
    }}
"""

CO_AUTHOR_FIELDS = f"""
    coAuthors {{
      {AUTHOR_FIELDS}
      bio {{
        html
      }}
    }}
"""

PUBLICATION_META_FIELDS = """
    publication {
      id
      title
      displayTitle
      url
      isTeam
      favicon
      about {
        html
      }
    }
"""


def comment_fields(max_comments: int = 25, max_replies: int = 10) -> str:
    """Selection for a post's comments and their first replies."""
    return f"""
    comments(first: {int(max_comments)}) {{
      totalDocuments
      edges {{
        node {{
          id
          dateAdded
          totalReactions
          content {{
            html
            markdown
          }}
          author {{
            {AUTHOR_FIELDS}
          }}
          replies(first: {int(max_replies)}) {{
            edges {{
              node {{
                id
                dateAdded
                content {{
                  html
                  markdown
                }}
                author {{
                  {AUTHOR_FIELDS}
                }}
              }}
            }}
          }}
        }}
      }}
    }}
"""


def build_posts_query(
    include_comments: bool = False,
    max_comments: int = 25,
    include_co_authors: bool = False,
    include_table_of_contents: bool = False,
    include_publication_meta: bool = False,
) -> str:
    """Build the paginated publication posts query.

    Args:
        include_comments: Select the first ``max_comments`` comments per post
        max_comments: Comment page size when comments are selected
        include_co_authors: Select co-authors
        include_table_of_contents: Select markdown and the table of contents
        include_publication_meta: Select the owning publication

    Returns:
        Query text taking ``$host``, ``$first`` and ``$after``
    """
    content = "html\n        markdown" if include_table_of_contents else "html"
    optional = "".join(
        [
            CO_AUTHOR_FIELDS if include_co_authors else "",
            TABLE_OF_CONTENTS_FIELDS if include_table_of_contents else "",
            PUBLICATION_META_FIELDS if include_publication_meta else "",
            comment_fields(max_comments) if include_comments else "",
        ]
    )
    return f"""
query GetPosts($host: String!, $first: Int!, $after: String) {{
  publication(host: $host) {{
    id
    title
    url
    posts(first: $first, after: $after) {{
      {PAGE_INFO_FIELDS}
      edges {{
        node {{
          {POST_FIELDS}
          content {{
            {content}
          }}
          {optional}
        }}
      }}
    }}
  }}
}}
"""


def build_single_post_query(include_comments: bool = False, include_co_authors: bool = False) -> str:
    """Build the query fetching one post of the publication by slug."""
    optional = "".join(
        [
            CO_AUTHOR_FIELDS if include_co_authors else "",
            comment_fields() if include_comments else "",
        ]
    )
    return f"""
query GetSinglePost($host: String!, $slug: String!) {{
  publication(host: $host) {{
    post(slug: $slug) {{
      {POST_FIELDS}
      content {{
        html
        markdown
      }}
      {TABLE_OF_CONTENTS_FIELDS}
      {optional}
    }}
  }}
}}
"""


POSTS_BY_TAG_QUERY = f"""
query GetPostsByTag($host: String!, $tagSlug: String!, $first: Int!, $after: String) {{
  publication(host: $host) {{
    id
    title
    posts(first: $first, after: $after, filter: {{ tagSlugs: [$tagSlug] }}) {{
      {PAGE_INFO_FIELDS}
      edges {{
        node {{
          {POST_FIELDS}
          content {{
            html
          }}
        }}
      }}
    }}
  }}
}}
"""

SEARCH_POSTS_QUERY = f"""
query SearchPosts($first: Int!, $after: String, $filter: SearchPostsOfPublicationInput!) {{
  searchPostsOfPublication(first: $first, after: $after, filter: $filter) {{
    edges {{
      cursor
      node {{
        id
        cuid
        title
        brief
        slug
        url
        publishedAt
        views
        reactionCount
        coverImage {{
          url
        }}
        author {{
          {AUTHOR_FIELDS}
        }}
        publication {{
          title
          url
        }}
      }}
    }}
    {PAGE_INFO_FIELDS}
  }}
}}
"""

PUBLICATION_QUERY = f"""
query GetPublication($host: String!) {{
  publication(host: $host) {{
    id
    title
    displayTitle
    url
    about {{
      html
      text
    }}
    author {{
      {AUTHOR_FIELDS}
    }}
    favicon
    descriptionSEO
    isTeam
    followersCount
    ogMetaData {{
      image
    }}
  }}
}}
"""

SERIES_POSTS_FIELDS = f"""
    posts(first: 100) {{
      edges {{
        node {{
          id
          title
          slug
          brief
          publishedAt
          readTimeInMinutes
          views
          url
          coverImage {{
            url
            isPortrait
          }}
          author {{
            name
            username
            profilePicture
          }}
        }}
      }}
    }}
"""


def build_series_query(include_posts: bool = False) -> str:
    """Build the paginated series list query, optionally with each series' posts."""
    posts = SERIES_POSTS_FIELDS if include_posts else ""
    return f"""
query GetSeries($host: String!, $first: Int!, $after: String) {{
  publication(host: $host) {{
    id
    title
    seriesList(first: $first, after: $after) {{
      {PAGE_INFO_FIELDS}
      edges {{
        node {{
          id
          cuid
          name
          slug
          description {{
            html
            text
          }}
          coverImage
          createdAt
          sortOrder
          author {{
            {AUTHOR_FIELDS}
            bio {{
              text
            }}
            followersCount
          }}
          {posts}
        }}
      }}
    }}
  }}
}}
"""


DRAFT_FIELDS = f"""
    id
    title
    subtitle
    canonicalUrl
    content {{
      markdown
    }}
    coverImage {{
      url
    }}
    author {{
      {AUTHOR_FIELDS}
    }}
    updatedAt
    {TAG_FIELDS}
"""

USER_DRAFTS_QUERY = f"""
query GetUserDrafts($first: Int!, $after: String) {{
  me {{
    drafts(first: $first, after: $after) {{
      edges {{
        node {{
          {DRAFT_FIELDS}
        }}
      }}
      {PAGE_INFO_FIELDS}
    }}
  }}
}}
"""

DRAFT_BY_ID_QUERY = f"""
query GetDraftById($id: ObjectId!) {{
  draft(id: $id) {{
    {DRAFT_FIELDS}
    {TABLE_OF_CONTENTS_FIELDS}
  }}
}}
"""
