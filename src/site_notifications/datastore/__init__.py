"""Access to the managed datastore holding contact messages, subscriptions and profiles."""
