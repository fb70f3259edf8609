"""
Tag Vocabulary Service

Each user keeps a vocabulary of tags: case-preserving, unique under
case-insensitive comparison. Renaming or deleting a tag also rewrites the
owner's records that carry it.
"""

from typing import Optional

from ledger.audit import AuditLogger
from ledger.errors import NoValidTags, Unauthorized, ValidationFailed, common_error_handler
from ledger.filtering import NEWEST_FIRST, ContainsAny, TagCanonicalizer
from ledger.models.audit import AuditEventType
from ledger.models.record import FieldError
from ledger.services.storage import RecordStorageInterface


class TagService:
    """List, search, add, rename and delete vocabulary tags."""
    
    def __init__(
        self,
        storage: RecordStorageInterface,
        canonicalizer: Optional[TagCanonicalizer] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._storage = storage
        self._canonicalizer = canonicalizer or TagCanonicalizer()
        self._audit = audit_logger or AuditLogger()
    
    async def _vocabulary(self, owner_id: str) -> list[str]:
        vocabulary = await self._storage.load_vocabulary(owner_id)
        if vocabulary is None:
            raise Unauthorized("User not found", 401)
        return vocabulary
    
    async def _rewrite_records(
        self,
        owner_id: str,
        old_tags: list[str],
        rename: Optional[str] = None,
    ) -> int:
        """Remove (or rename, when rename is given) tags on every record carrying them."""
        affected = await self._storage.query_records(
            owner_id, ContainsAny("tags", tuple(old_tags)), NEWEST_FIRST
        )
        for record in affected:
            tags = []
            for tag in record.tags:
                if tag not in old_tags:
                    tags.append(tag)
                elif rename is not None and rename not in tags:
                    tags.append(rename)
            await self._storage.save_record(record.model_copy(update={"tags": tuple(tags)}))
        return len(affected)
    
    async def list_tags(self, owner_id: str) -> list[str]:
        try:
            return await self._vocabulary(owner_id)
        except Exception as e:
            common_error_handler(e, "Failed to list tags")
    
    async def search_tags(self, owner_id: str, fragment: str) -> list[str]:
        """Vocabulary tags containing the fragment, ignoring case."""
        fragment = fragment.strip()
        if not fragment:
            raise ValidationFailed([FieldError(message="Empty tag given", field="tag")])
        
        try:
            vocabulary = await self._vocabulary(owner_id)
        except Exception as e:
            common_error_handler(e, "Failed to search tags")
        
        needle = fragment.casefold()
        return [tag for tag in vocabulary if needle in tag.casefold()]
    
    async def add_tags(self, owner_id: str, tags: list[str]) -> list[str]:
        """Add new tags; returns the ones that were not already present."""
        canonical = self._canonicalizer.canonicalize(tags)
        if not canonical:
            raise NoValidTags()
        
        try:
            vocabulary = await self._vocabulary(owner_id)
            known = {tag.casefold() for tag in vocabulary}
            added = [tag for tag in canonical if tag.casefold() not in known]
            if added:
                await self._storage.save_vocabulary(owner_id, vocabulary + added)
        except Exception as e:
            common_error_handler(e, "Failed to add tags")
        
        if added:
            await self._audit.log_tags_changed(AuditEventType.TAGS_ADDED, owner_id, added)
        return added
    
    async def edit_tag(self, owner_id: str, old_tag: str, new_tag: str) -> str:
        """Rename a vocabulary tag everywhere it is used."""
        errors = []
        renamed = self._canonicalizer.canonicalize([new_tag])
        if not renamed:
            errors.append(FieldError(
                message=(
                    f"tag must be {self._canonicalizer.min_length} to "
                    f"{self._canonicalizer.max_length} characters long"
                ),
                field="newTag",
            ))
        
        try:
            vocabulary = await self._vocabulary(owner_id)
            current = self._canonicalizer.resolve_against_vocabulary(
                [old_tag.strip()], vocabulary
            )
            if not current:
                errors.append(FieldError(message="Tag not found", field="oldTag"))
            
            if current and renamed:
                taken = {
                    tag.casefold() for tag in vocabulary if tag != current[0]
                }
                if renamed[0].casefold() in taken:
                    errors.append(FieldError(message="Tag already exists", field="newTag"))
            
            if errors:
                raise ValidationFailed(errors)
            
            old, new = current[0], renamed[0]
            await self._storage.save_vocabulary(
                owner_id, [new if tag == old else tag for tag in vocabulary]
            )
            await self._rewrite_records(owner_id, [old], rename=new)
        except Exception as e:
            common_error_handler(e, "Failed to edit tag")
        
        await self._audit.log_tags_changed(AuditEventType.TAG_RENAMED, owner_id, [old, new])
        return new
    
    async def delete_tags(self, owner_id: str, tags: list[str]) -> list[str]:
        """Remove tags from the vocabulary and from every record carrying them."""
        try:
            vocabulary = await self._vocabulary(owner_id)
            removed = self._canonicalizer.resolve_required(tags, vocabulary)
            if not removed:
                raise NoValidTags()
            
            await self._storage.save_vocabulary(
                owner_id, [tag for tag in vocabulary if tag not in removed]
            )
            await self._rewrite_records(owner_id, removed)
        except Exception as e:
            common_error_handler(e, "Failed to delete tags")
        
        await self._audit.log_tags_changed(AuditEventType.TAGS_DELETED, owner_id, removed)
        return removed
