from hidden_archives.extensions import db


class TermMeta(db.Model):
    """Generic key/value metadata attached to a taxonomy term."""

    __tablename__ = "termmeta"

    id = db.Column(db.Integer, primary_key=True)
    term_id = db.Column(
        db.Integer,
        db.ForeignKey("categories.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    meta_key = db.Column(db.String(255), nullable=False)
    meta_value = db.Column(db.Text)

    __table_args__ = (
        db.UniqueConstraint("term_id", "meta_key", name="uq_termmeta_term_key"),
    )

    def __repr__(self):
        return f"<TermMeta term_id={self.term_id} {self.meta_key}={self.meta_value!r}>"
