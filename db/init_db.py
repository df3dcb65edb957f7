"""
db/init_db.py
-------------
Creates the database schema (tables) if they do not already exist.
Run this module directly to initialize a fresh database:
    python -m db.init_db
"""

from db.connection import get_connection, release_connection
from utils.logger import get_logger

logger = get_logger(__name__)

SCHEMA_SQL = """
-- Users table: one row per Telegram account
CREATE TABLE IF NOT EXISTS users (
    id              SERIAL PRIMARY KEY,
    telegram_id     BIGINT UNIQUE,
    first_name      VARCHAR(100),
    created_at      TIMESTAMPTZ DEFAULT NOW()
);

-- User profiles: locale and reminder preferences
CREATE TABLE IF NOT EXISTS user_profiles (
    user_id                     INT PRIMARY KEY REFERENCES users(id) ON DELETE CASCADE,
    locale                      VARCHAR(10) DEFAULT 'pt-BR',
    statement_reminders_enabled BOOLEAN DEFAULT TRUE,
    payment_reminders_enabled   BOOLEAN DEFAULT TRUE,
    updated_at                  TIMESTAMPTZ DEFAULT NOW()
);

-- WhatsApp identifiers used to deliver reminders
CREATE TABLE IF NOT EXISTS authorized_whatsapp_numbers (
    id              SERIAL PRIMARY KEY,
    user_id         INT NOT NULL REFERENCES users(id) ON DELETE CASCADE,
    whatsapp_number VARCHAR(30),
    whatsapp_jid    VARCHAR(100),
    whatsapp_lid    VARCHAR(100),
    is_primary      BOOLEAN DEFAULT FALSE,
    created_at      TIMESTAMPTZ DEFAULT NOW()
);

-- Categories: user_id NULL marks the built-in defaults
CREATE TABLE IF NOT EXISTS categories (
    id              SERIAL PRIMARY KEY,
    user_id         INT REFERENCES users(id) ON DELETE CASCADE,
    name            VARCHAR(50) NOT NULL,
    type            VARCHAR(10) NOT NULL DEFAULT 'expense' CHECK (type IN ('expense', 'income')),
    icon            VARCHAR(10),
    UNIQUE NULLS NOT DISTINCT (user_id, name)
);

-- Payment methods: cards track spending by statement period when credit_mode is on
CREATE TABLE IF NOT EXISTS payment_methods (
    id                      SERIAL PRIMARY KEY,
    user_id                 INT NOT NULL REFERENCES users(id) ON DELETE CASCADE,
    name                    VARCHAR(50) NOT NULL,
    type                    VARCHAR(10) NOT NULL DEFAULT 'credit' CHECK (type IN ('credit', 'debit', 'pix', 'cash')),
    credit_mode             BOOLEAN DEFAULT FALSE,
    statement_closing_day   INT CHECK (statement_closing_day BETWEEN 1 AND 31),
    payment_due_day         INT CHECK (payment_due_day BETWEEN 1 AND 60),
    monthly_budget          NUMERIC(12,2),
    UNIQUE(user_id, name)
);

-- Installment plans: one purchase split into monthly transactions
CREATE TABLE IF NOT EXISTS installment_plans (
    id                  SERIAL PRIMARY KEY,
    user_id             INT NOT NULL REFERENCES users(id) ON DELETE CASCADE,
    description         TEXT NOT NULL,
    total_amount        NUMERIC(12,2) NOT NULL,
    total_installments  INT NOT NULL CHECK (total_installments BETWEEN 1 AND 60),
    first_payment_date  DATE NOT NULL,
    status              VARCHAR(10) NOT NULL DEFAULT 'active' CHECK (status IN ('active', 'paid_off', 'cancelled')),
    category_id         INT REFERENCES categories(id) ON DELETE SET NULL,
    payment_method_id   INT REFERENCES payment_methods(id) ON DELETE SET NULL,
    created_at          TIMESTAMPTZ DEFAULT NOW()
);

-- Transactions: every expense or income, including one row per installment
CREATE TABLE IF NOT EXISTS transactions (
    id                  SERIAL PRIMARY KEY,
    user_id             INT NOT NULL REFERENCES users(id) ON DELETE CASCADE,
    type                VARCHAR(10) NOT NULL CHECK (type IN ('expense', 'income')),
    amount              NUMERIC(12,2) NOT NULL CHECK (amount > 0),
    category_id         INT REFERENCES categories(id) ON DELETE SET NULL,
    payment_method      VARCHAR(50),
    payment_method_id   INT REFERENCES payment_methods(id) ON DELETE SET NULL,
    description         TEXT,
    date                DATE NOT NULL DEFAULT CURRENT_DATE,
    installment_plan_id INT REFERENCES installment_plans(id) ON DELETE CASCADE,
    installment_number  INT,
    raw_text            TEXT,
    created_at          TIMESTAMPTZ DEFAULT NOW()
);

-- Recurring payments: generate one transaction per month on day_of_month
CREATE TABLE IF NOT EXISTS recurring_payments (
    id              SERIAL PRIMARY KEY,
    user_id         INT NOT NULL REFERENCES users(id) ON DELETE CASCADE,
    description     VARCHAR(100) NOT NULL,
    amount          NUMERIC(12,2) NOT NULL,
    type            VARCHAR(10) NOT NULL DEFAULT 'expense',
    day_of_month    INT NOT NULL CHECK (day_of_month BETWEEN 1 AND 31),
    next_due_date   DATE NOT NULL,
    category_id     INT REFERENCES categories(id) ON DELETE SET NULL,
    payment_method  VARCHAR(50),
    active          BOOLEAN DEFAULT TRUE,
    created_at      TIMESTAMPTZ DEFAULT NOW()
);

-- Budgets: monthly spending limit per category (category_id NULL = overall)
CREATE TABLE IF NOT EXISTS budgets (
    id              SERIAL PRIMARY KEY,
    user_id         INT NOT NULL REFERENCES users(id) ON DELETE CASCADE,
    category_id     INT REFERENCES categories(id) ON DELETE CASCADE,
    limit_amount    NUMERIC(12,2) NOT NULL,
    UNIQUE NULLS NOT DISTINCT (user_id, category_id)
);

-- Learned patterns: per-user regexes generated from confident AI parses
CREATE TABLE IF NOT EXISTS learned_patterns (
    id              SERIAL PRIMARY KEY,
    user_id         INT NOT NULL REFERENCES users(id) ON DELETE CASCADE,
    pattern_type    VARCHAR(30) NOT NULL,
    regex_pattern   TEXT NOT NULL,
    example_input   TEXT,
    parsed_output   JSONB NOT NULL,
    confidence      NUMERIC(3,2) DEFAULT 0.9,
    usage_count     INT DEFAULT 0,
    success_count   INT DEFAULT 0,
    is_active       BOOLEAN DEFAULT TRUE,
    last_used_at    TIMESTAMPTZ,
    created_at      TIMESTAMPTZ DEFAULT NOW(),
    UNIQUE (user_id, regex_pattern)
);

-- Payment method preferences: which method a user picks per category
CREATE TABLE IF NOT EXISTS payment_method_preferences (
    user_id         INT NOT NULL REFERENCES users(id) ON DELETE CASCADE,
    category_id     INT NOT NULL REFERENCES categories(id) ON DELETE CASCADE,
    payment_method  VARCHAR(50) NOT NULL,
    usage_count     INT DEFAULT 1,
    last_used_at    TIMESTAMPTZ DEFAULT NOW(),
    PRIMARY KEY (user_id, category_id, payment_method)
);

-- Semantic cache: embeddings of messages the AI already interpreted
CREATE TABLE IF NOT EXISTS message_embeddings (
    id              SERIAL PRIMARY KEY,
    user_id         INT NOT NULL REFERENCES users(id) ON DELETE CASCADE,
    message_text    TEXT NOT NULL,
    embedding       DOUBLE PRECISION[] NOT NULL,
    parsed_intent   JSONB NOT NULL,
    usage_count     INT DEFAULT 0,
    created_at      TIMESTAMPTZ DEFAULT NOW(),
    last_used_at    TIMESTAMPTZ DEFAULT NOW()
);

-- Parsing metrics: which strategy resolved each message
CREATE TABLE IF NOT EXISTS parsing_metrics (
    id              SERIAL PRIMARY KEY,
    user_id         INT REFERENCES users(id) ON DELETE SET NULL,
    message_text    TEXT,
    strategy        VARCHAR(30) NOT NULL,
    action          VARCHAR(50),
    confidence      NUMERIC(3,2),
    success         BOOLEAN NOT NULL,
    error_message   TEXT,
    duration_ms     INT,
    created_at      TIMESTAMPTZ DEFAULT NOW()
);

-- Default categories
INSERT INTO categories (user_id, name, type, icon) VALUES
    (NULL, 'Alimentação', 'expense', '🍔'),
    (NULL, 'Mercado', 'expense', '🛒'),
    (NULL, 'Transporte', 'expense', '🚗'),
    (NULL, 'Moradia', 'expense', '🏠'),
    (NULL, 'Contas', 'expense', '💡'),
    (NULL, 'Saúde', 'expense', '💊'),
    (NULL, 'Educação', 'expense', '📚'),
    (NULL, 'Lazer', 'expense', '🎬'),
    (NULL, 'Compras', 'expense', '🛍️'),
    (NULL, 'Assinaturas', 'expense', '📺'),
    (NULL, 'Outros', 'expense', '📦'),
    (NULL, 'Salário', 'income', '💼'),
    (NULL, 'Renda Extra', 'income', '💰')
ON CONFLICT DO NOTHING;

-- Indexes for faster queries
CREATE INDEX IF NOT EXISTS idx_transactions_user_date ON transactions(user_id, date);
CREATE INDEX IF NOT EXISTS idx_transactions_pm_date ON transactions(payment_method_id, date);
CREATE INDEX IF NOT EXISTS idx_payment_methods_closing ON payment_methods(statement_closing_day) WHERE credit_mode = TRUE;
CREATE INDEX IF NOT EXISTS idx_whatsapp_user ON authorized_whatsapp_numbers(user_id);
CREATE INDEX IF NOT EXISTS idx_recurring_due ON recurring_payments(next_due_date) WHERE active = TRUE;
CREATE INDEX IF NOT EXISTS idx_embeddings_user ON message_embeddings(user_id);
"""


def create_tables() -> None:
    """
    Execute the schema SQL to create all tables.
    Safe to call multiple times (uses IF NOT EXISTS).
    """
    conn = get_connection()
    try:
        with conn.cursor() as cur:
            cur.execute(SCHEMA_SQL)
        conn.commit()
        logger.info("Database schema initialized successfully.")
    except Exception as e:
        conn.rollback()
        logger.error(f"Failed to initialize schema: {e}")
        raise
    finally:
        release_connection(conn)


if __name__ == "__main__":
    from db.connection import init_pool
    init_pool()
    create_tables()
    logger.info("Database schema created successfully.")
