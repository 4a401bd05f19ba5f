"""GraphQL documents used by the finance API."""

TRANSACTION_FIELDS = """
    error_message
    name
    amount
    currency
    created_at
    is_atm
    is_purchase
    is_transfer
    is_credit
    is_debit
    full_date
    card_number
    account_number
    org_name
    org_type
    success
    transaction_type
    merchant_category
    id
    input { from location text }
    metadata { type identity { ipAddress userAgent } }
"""

PROFILE_FIELDS = """
    goals
    occupation
    housing
    transport
    currency
    age
    notify_daily_report
    notify_weekly_report
    notify_monthly_report
    notify_annual_report
    notify_new_recommendation
    favorite_realtime_voice
    achievements { id name created_at }
    created_at
    email
    name
    first_name
    last_name
    picture
    timezone
    plan
    planStartsAt
    planExpiresAt
"""

TARGET_FIELDS = """
    id
    name
    emoji
    strategy
    currency
    amount_saved
    amount_target
    expected_start_at
    expected_end_at
    remind_weekly
    remind_monthly
    completed
    archived
    created_at
    updated_at
"""

# === Profile ===

GET_PROFILE = f"""
query profile {{
    profile {{ {PROFILE_FIELDS} }}
}}
"""

UPDATE_PROFILE = f"""
mutation updateProfile($input: ProfileInput!) {{
    updateProfile(input: $input) {{ {PROFILE_FIELDS} }}
}}
"""

# === Transactions ===

LIST_TRANSACTIONS = f"""
query listTransactions($nextToken: String, $perPage: Int) {{
    listTransactions(nextToken: $nextToken, perPage: $perPage) {{
        list {{ {TRANSACTION_FIELDS} }}
        nextToken
    }}
}}
"""

CREATE_TRANSACTION = f"""
mutation createTransaction($input: TransactionManualInput!) {{
    createTransaction(input: $input) {{ {TRANSACTION_FIELDS} }}
}}
"""

UPDATE_TRANSACTION = f"""
mutation updateTransaction($id: String!, $input: TransactionEditInput!) {{
    updateTransaction(id: $id, input: $input) {{ {TRANSACTION_FIELDS} }}
}}
"""

DELETE_TRANSACTION = """
mutation deleteTransaction($id: String!) {
    deleteTransaction(id: $id) { success message }
}
"""

# === Targets ===

LIST_TARGETS = f"""
query listTargets {{
    listTargets {{ {TARGET_FIELDS} }}
}}
"""

CREATE_TARGET = f"""
mutation createTarget($input: TargetInput!) {{
    createTarget(input: $input) {{ {TARGET_FIELDS} }}
}}
"""

UPDATE_TARGET = f"""
mutation updateTarget($id: String!, $input: TargetInput!) {{
    updateTarget(id: $id, input: $input) {{ {TARGET_FIELDS} }}
}}
"""

# === Reports ===

LIST_REPORTS = """
query listReports($ids: [String]!) {
    listReports(ids: $ids) {
        id
        cards_json
        counts_json
        merchant_categories_json
        org_names_json
        sums_json
    }
}
"""
