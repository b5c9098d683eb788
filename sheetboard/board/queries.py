"""GraphQL documents, one per adapter operation."""

LIST_GROUPS = """
query ($boardId: [ID!]) {
  boards(ids: $boardId) {
    groups {
      id
      title
    }
  }
}
"""

CREATE_GROUP = """
mutation ($boardId: ID!, $groupName: String!) {
  create_group(board_id: $boardId, group_name: $groupName) {
    id
  }
}
"""

ARCHIVE_GROUP = """
mutation ($boardId: ID!, $groupId: String!) {
  archive_group(board_id: $boardId, group_id: $groupId) {
    id
  }
}
"""

LIST_COLUMNS = """
query ($boardId: [ID!]) {
  boards(ids: $boardId) {
    columns {
      id
      title
    }
  }
}
"""

CREATE_COLUMN = """
mutation ($boardId: ID!, $title: String!, $columnType: ColumnType!) {
  create_column(board_id: $boardId, title: $title, column_type: $columnType) {
    id
  }
}
"""

DELETE_COLUMN = """
mutation ($boardId: ID!, $columnId: String!) {
  delete_column(board_id: $boardId, column_id: $columnId) {
    id
  }
}
"""

ITEMS_PAGE = """
query ($boardId: [ID!], $limit: Int, $cursor: String) {
  boards(ids: $boardId) {
    items_page(limit: $limit, cursor: $cursor) {
      cursor
      items {
        id
        name
        group {
          id
        }
        column_values {
          column {
            title
          }
          text
        }
      }
    }
  }
}
"""

CREATE_ITEM = """
mutation ($boardId: ID!, $groupId: String!, $itemName: String!) {
  create_item(board_id: $boardId, group_id: $groupId, item_name: $itemName) {
    id
  }
}
"""

UPDATE_ITEM_FIELDS = """
mutation ($boardId: ID!, $itemId: ID!, $columnValues: JSON!) {
  change_multiple_column_values(board_id: $boardId, item_id: $itemId, column_values: $columnValues) {
    id
  }
}
"""

ME = """
query {
  me {
    id
    name
    email
  }
}
"""

LIST_WORKSPACES = """
query {
  workspaces {
    id
    name
  }
}
"""

LIST_BOARDS = """
query ($workspaceIds: [ID], $limit: Int, $page: Int) {
  boards(workspace_ids: $workspaceIds, limit: $limit, page: $page) {
    id
    name
  }
}
"""

CREATE_BOARD = """
mutation ($boardName: String!, $workspaceId: ID) {
  create_board(board_name: $boardName, board_kind: private, workspace_id: $workspaceId) {
    id
  }
}
"""
